"""
Services package: storage repositories and the reporting pipeline
"""
