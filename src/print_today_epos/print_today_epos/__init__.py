"""Print Today EPOS back-office package.

Organized by feature modules (attendance, jobs, quotations, tasks,
transactions) with a thin Flask controller layer over service/repository
layers backed by a document store.
"""
