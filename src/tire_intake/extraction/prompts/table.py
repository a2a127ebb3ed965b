"""
Prompt for reading tire price / stock tables from photos.
Names the exact output fields and the size format the parser expects.
"""

TABLE_EXTRACTION_PROMPT = """This image contains a table of tires (or other goods) from a supplier price list or stock list. Extract EVERY data row of the table and answer with a single clean JSON array following the rules below.

Rules:

1. One object per table row with exactly these fields: brand, size, quantity, price, total, selling_price.

2. brand - the brand / product name (text). Keep any batch qualifier written next to it, e.g. "Cotechoo, Cho1".

3. size - the tire size, ALWAYS in this format: 165/70/13 (three numbers separated by slashes). For example "175 70 R13" -> "175/70/13", "185/65R15" -> "185/65/15".

4. quantity - number of pieces (positive whole number).

5. price - unit cost of one piece (number).

6. total - line total cost (number).

7. selling_price - price + 100000 for each row.

The table columns may be labelled in other languages (for example: Товар номи, Razmer, Сони, Soni, Нархи, Narx, Қиймати, Jami). Map them to the fields above. Skip header rows and total / summary rows.

Write numbers as plain JSON numbers without thousands separators or currency symbols.

Your answer must be ONLY the JSON array: no other text, no explanations, no markdown code fences. Example:

[{"brand":"Largo","size":"165/70/13","quantity":4,"price":320000,"total":1280000,"selling_price":420000}]
"""
