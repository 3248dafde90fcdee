"""Payments module"""
