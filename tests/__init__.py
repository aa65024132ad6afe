"""Tests for k8s-peer-pool."""
