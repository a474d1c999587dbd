"""LINX Remote command-line scripts"""
