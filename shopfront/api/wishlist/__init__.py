"""Wishlist module"""
