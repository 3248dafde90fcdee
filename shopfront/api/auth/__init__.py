"""Auth module"""
