"""Products module"""
