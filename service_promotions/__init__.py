"""
Promotions Service for the Promotion Rule Engine.
"""
