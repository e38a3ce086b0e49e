"""Shared utilities - validation helpers and error types"""
