"""API route blueprints"""
