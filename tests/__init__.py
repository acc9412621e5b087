"""Test suite for the seasonbook engine."""
