# src/manifest_resolver/core/__init__.py
"""
Core do Manifest Resolver.

Implementação pura da resolução: nenhuma parte do core abre conexões,
chama provedores de nuvem ou mantém estado global. A única leitura de
disco é `load_manifest_file`, fora do caminho `resolve_text`.

Princípios fundamentais:
    - Mesma entrada, mesma saída (byte a byte)
    - Dentro de um estágio os problemas são acumulados; entre estágios a
      resolução para no primeiro que falha
    - Todo problema é classificado como do manifest (user) ou da
      plataforma (internal)
"""
