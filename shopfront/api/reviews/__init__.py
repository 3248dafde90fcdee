"""Reviews module"""
