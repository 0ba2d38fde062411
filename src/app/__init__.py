"""App — coração do emissor: orquestração, casos de uso e infraestrutura.

Subpastas:
- bootstrap/: composition root (factories, inicialização, wiring)
- domain/: entidades do boleto, entrada do pagador, calendário de vencimento
- use_cases/: casos de uso (emitir e arquivar, reprocessar arquivamento)
- services/: serviços de aplicação (emissão, sequências, arquivamento)
- infra/: implementações concretas de IO (banco, Firestore, GCS, secrets)
- protocols/: contratos/interfaces
- observability/: correlation_id dos logs estruturados

Padrão: use_cases orquestram; services executam; infra faz IO; config e utils apoiam.
"""
