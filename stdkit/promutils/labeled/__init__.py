"""Metrics labelled with values taken from a context."""