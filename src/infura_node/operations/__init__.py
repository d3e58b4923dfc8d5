"""
Operations - What the node does for each input item.

- dispatcher:   run the selected operation over all items
- load_options: dynamic dropdown contents (contract functions and inputs)
"""
