"""Orders module"""
