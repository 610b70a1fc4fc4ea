"""QRchek attendance package.

Organized by feature modules (users, attendance, autocheckout, payroll, ...)
with a thin Flask controller layer over service/repository layers.
"""
