"""Admin module"""
