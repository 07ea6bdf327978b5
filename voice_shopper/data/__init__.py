"""Bundled reference data"""
