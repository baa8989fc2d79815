"""HTTP layer for the Staffing & Assessment service"""
