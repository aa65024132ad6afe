"""Tests for the command line tool."""
