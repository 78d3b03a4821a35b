"""
hopfetch command line interface
"""
