"""
                        Services Module

Business logic kept out of the route handlers.

Services:
    - payment:  Stripe payment intents (mock in development)
    - checkout: payment recording and cart cleanup
    - reports:  dashboard aggregation pipelines
"""
