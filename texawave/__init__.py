"""
TexaWave ERP backend.
HR, payroll, sales order production/QC lifecycle, invoicing and purchases.
"""
__version__ = "1.0.0"
