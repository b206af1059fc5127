"""Logger configuration and a Google Cloud JSON log formatter."""