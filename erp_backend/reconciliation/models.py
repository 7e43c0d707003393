# reconciliation/models.py

# No tables. The module exists so Django delivers post_migrate to this app.
