"""Core domain: path resolution, timestamps, durations, labels and views."""
