"""Worker loop: sweep controller and wakeup channel."""
