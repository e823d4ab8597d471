"""Tutor directory crawler.

This package crawls a tutor directory across every location/subject filter,
extracts each tutor profile into a structured record, and writes the result
as CSV. Network responses are cached on disk so reruns only fetch what is
new.
"""
