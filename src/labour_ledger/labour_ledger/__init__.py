"""Labour Ledger package.

This package is organized by feature modules (roster, attendance, payroll,
reports) on top of a generic async record store, with a thin Flask controller
layer and service/repository layers.
"""
