"""Configuration and logging utilities"""
