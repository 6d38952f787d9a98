"""Hotels app package.

Owns the room catalog (hotels and their concrete rooms) and the
inventory ledger that caps how many rooms of each type a hotel may
materialize. The booking core only reads from this app.
"""
