"""Related-term suggestion engines"""
