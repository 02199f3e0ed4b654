"""
Customers module.

Scope:
- List + live search over name/phone
- Create, edit (view opens the same editable modal), delete with confirmation
- Pluggable record store (SQL via SQLAlchemy, or a hosted REST table API)
"""
