"""Command line tool for k8s-peer-pool."""
