"""Core domain logic for maternal health tracking.

This package contains the clinical records, validation rules, risk
assessment and alerting, isolated from transport and persistence concerns
for easy testing and reasoning.
"""
