"""
API routes.

- auth: current user profile and grants
- predictions: public listing, gated detail, create/update, access grants
- blog: public listing, post detail, create
- stats: landing-page counters
- subscription: tier upgrades
- admin: user, prediction and blog administration
"""
