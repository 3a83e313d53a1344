"""Clinical Attendance package.

Verifies clinical-rotation clock-ins and clock-outs. Organized by feature
modules (catalog, eligibility, rotations, rules, clock, accounting) with a thin
Flask controller layer over service/repository layers.
"""
