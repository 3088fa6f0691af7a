"""Core infrastructure: settings, logging, database, auth, metrics"""
