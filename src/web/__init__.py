"""
Web adapter: FastAPI routes binding the pipeline to a browser UI.
"""
