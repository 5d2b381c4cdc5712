"""Semantic model input and graph element output"""
