"""
Pages: storage, request pipeline, HTML and JSON endpoints.
"""
