"""Tests for the control plane clients."""
