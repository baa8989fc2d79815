"""Bulk import of employee records"""
