"""auth/ -- Authentication core for the credential service.

Password hashing, token issue/verify, the register/login flow, the bearer
guard and the user store.

Layer rule: auth/ imports only stdlib + third-party libraries (and core/ for
type hints). It does NOT import from api/. api/ imports from auth/, not the
other way around.
"""
