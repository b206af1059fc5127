"""In-process metrics registry, scoped metric names, stopwatches and work-queue metrics."""