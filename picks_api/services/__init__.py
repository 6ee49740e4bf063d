"""
Business rules that sit between the routes and the repositories.

- access_policy: who may see a premium prediction
- subscription_service: paid-tier upgrades
"""
