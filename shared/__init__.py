"""Configuration and logging shared by the runtime and its HTTP adapter"""
