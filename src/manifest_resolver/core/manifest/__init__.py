"""
Manifest — parsing, composição de schema, validação estrutural e modelo interno.

Módulos:
    - loader: texto/arquivo → documento (dict)
    - schema: schema base + schemas de config dos tipos registrados
    - validator: documento × schema composto → lista de `SchemaViolation`
    - model: documento validado → `Manifest` / `ComponentSpec` / `BindDirective`
"""
