"""Contract store backends"""
