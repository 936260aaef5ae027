# src/manifest_resolver/__init__.py
"""
Manifest Resolver — resolução determinística de manifests de infraestrutura.

Transforma um manifest declarativo (serviço, owner, compliance framework,
defaults por ambiente, componentes tipados e seus binds) em um plano de
execução validado, hidratado para o ambiente alvo, com configuração em
camadas de compliance e binds resolvidos em ordem de dependência.

Arquitetura em alto nível:
    - core.manifest     → parse, schema composto e modelo interno
    - core.hydration    → interpolação `${env:}`, `${envIs:}`, `${ref:}`
    - core.references   → alvos de bind e referências entre componentes
    - core.config       → settings, merge em camadas, procedência e hashing
    - core.binding      → estratégias de bind, capabilities e níveis de síntese
    - core.governance   → supressões, patches e overrides de política
    - core.engine       → planejamento e execução fail-fast dos estágios
    - core.traceability → o ResolvedPlan e sua persistência
    - synthesis         → seam do backend de síntese (dry-run embutido)

Limites explícitos:
    - Não faz I/O de rede nem chamadas a provedores de nuvem
    - Não guarda estado entre resoluções
    - Não define exit codes (responsabilidade da CLI)
"""

from .resolver import ManifestResolver, ResolutionResult

__all__ = ["ManifestResolver", "ResolutionResult"]
