"""Submissions domain - booking form intake, storage and admin access"""
