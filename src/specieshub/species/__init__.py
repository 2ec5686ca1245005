"""Species catalog domain package.

- models: Species table, Kingdom enumeration and validated form values
- forms: WTForms form used by the add and edit dialogs
- repository: reads and writes against the species table
- editor: the add/edit submission flow and its outcomes
"""
