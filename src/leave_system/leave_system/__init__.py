"""Leave System package.

Leave/overtime duration, entitlement and approval engine, organized by feature
modules (employees, leaves, entitlements, approvals, vehicles) with a thin
Flask controller layer and service/repository layers.
"""
