"""
Process-wide plumbing for the car inventory API: settings, the asyncpg pool
and the error types every route shares. Car SQL and rules live in `cars/`.
"""
