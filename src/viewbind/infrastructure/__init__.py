"""Infrastructure: record sources and view sinks."""
