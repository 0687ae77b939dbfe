"""Tests for mcpmux_installer."""
