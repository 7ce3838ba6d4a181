"""Prompt templates for the market analysis providers."""

from __future__ import annotations

import json
from typing import Any, Dict, Iterable

from arq6.services.market_research import ResearchContext

SYSTEM_PROMPT = (
    "Você é um especialista em pesquisa de mercado e lançamentos digitais com mais "
    "de 15 anos de experiência. Sua especialidade é analisar mercados brasileiros e "
    "criar estratégias de lançamento de produtos digitais baseadas em dados reais e "
    "insights profundos."
)

_SNIPPET_MAX_LEN = 400

_REPORT_STRUCTURE = """\
## 🎯 DEFINIÇÃO DO ESCOPO
Identifique e detalhe:
- Segmento principal e subsegmentos
- Produto/serviço ideal para lançamento
- Proposta de valor única

## 👥 ANÁLISE DO AVATAR (CLIENTE IDEAL)

### Demografia:
Pesquise e defina:
- Faixa etária predominante
- Gênero e distribuição
- Localização geográfica principal
- Faixa de renda média
- Nível de escolaridade comum
- Profissões mais frequentes

### Psicografia:
Mapeie:
- 3 valores principais
- Estilo de vida característico
- 2 principais aspirações
- 3 medos mais comuns
- 2 frustrações recorrentes

### Comportamento Digital:
Identifique:
- 2 plataformas mais usadas
- Horários de pico online
- Tipos de conteúdo preferidos
- Influenciadores que seguem

## 💔 MAPEAMENTO DE DORES E DESEJOS

Liste as 5 principais dores com:
- Descrição detalhada
- Como impacta a vida
- Nível de urgência (Alta/Média/Baixa)

Identifique:
- Estado atual vs. Estado desejado
- Obstáculos percebidos
- Sonho secreto não verbalizado

## 🏆 ANÁLISE DA CONCORRÊNCIA

Pesquise e liste:
- 2 concorrentes diretos principais (com preços, USP, forças e fraquezas)
- 2 concorrentes indiretos
- 3 gaps identificados no mercado

## 💰 ANÁLISE DE MERCADO E METRIFICAÇÃO

### Calcule o TAM/SAM/SOM:
- TAM: População total × % mercado × ticket médio anual
- SAM: TAM × % segmento × % alcance realista
- SOM: SAM × % market share possível

### Identifique:
- Volume de busca mensal do segmento
- Tendências em alta e em queda
- Sazonalidade (melhores e piores meses)

## 🎯 ANÁLISE DE PALAVRAS-CHAVE E CUSTOS

Pesquise as 5 principais palavras-chave com:
- Volume de busca mensal
- CPC e CPM médios
- Dificuldade SEO
- Intenção de busca

### Custos por plataforma:
Estime para Facebook, Google, YouTube e TikTok:
- CPM médio
- CPC médio
- CPL médio
- Taxa de conversão esperada

## 📊 MÉTRICAS DE PERFORMANCE

Defina benchmarks do mercado:
- CAC médio por canal
- Funil de conversão padrão (%)
- LTV médio e LTV:CAC ratio
- ROI esperado por canal

## 🗣️ VOZ DO MERCADO

Identifique:
- 3 principais objeções e como contorná-las
- Linguagem específica (termos, gírias, gatilhos)
- 3 crenças limitantes comuns

## 📊 HISTÓRICO DE LANÇAMENTOS

Pesquise:
- 2 cases de sucesso (com números)
- 1 fracasso notável e lições aprendidas

## 💸 ANÁLISE DE PREÇOS

Mapeie:
- Faixas de preço (Low/Mid/High ticket)
- Elasticidade e sensibilidade a preço
- Sweet spot de preço

## 🚀 ESTRATÉGIA DE AQUISIÇÃO

Recomende:
- Mix ideal de canais (% do budget)
- Budget por fase (pré/lançamento/pós)
- CPL esperado por canal

## 📈 PROJEÇÕES

Apresente 3 cenários (conservador/realista/otimista):
- Taxa de conversão
- Faturamento projetado
- ROI esperado

## 🎁 BÔNUS E GARANTIAS

Sugira:
- 3 bônus valorizados com valor percebido
- Tipo de garantia ideal

## 🎯 SÍNTESE ESTRATÉGICA

Crie:
- Big Idea única para o lançamento
- Promessa principal irresistível
- Mecanismo único de entrega
- Provas de conceito necessárias
- Meta SMART completa

## 💡 PLANO DE AÇÃO

Liste 7 próximos passos prioritários e práticos.

---

**IMPORTANTE**:
- Use dados reais e atualizados quando possível
- Faça estimativas conservadoras baseadas em padrões do mercado brasileiro
- Seja específico com números e métricas
- Foque em insights acionáveis
- Base suas análises nas pesquisas web fornecidas
- Considere especificamente o contexto e comportamento do consumidor brasileiro
- Use linguagem clara e profissional

Agora, realize a pesquisa completa com base no contexto fornecido.
"""


def _truncate(value: str, max_len: int = _SNIPPET_MAX_LEN) -> str:
    if len(value) > max_len:
        return value[: max_len - 3] + "..."
    return value


def format_web_research(results: Iterable[Dict[str, Any]]) -> str:
    lines = [
        f"- {item.get('title', '')}: {_truncate(str(item.get('snippet', '')))}"
        for item in results
    ]
    return "\n".join(lines) if lines else "Nenhuma pesquisa disponível"


def build_analysis_prompt(context: ResearchContext) -> str:
    """Render the full report request for ``context``."""
    trend_section = (
        json.dumps(context.trend_data, ensure_ascii=False, indent=2)
        if context.trend_data
        else "Não disponível"
    )
    header = (
        "Com base no contexto fornecido abaixo, realize uma pesquisa completa e "
        "detalhada seguindo EXATAMENTE esta estrutura:\n\n"
        "**CONTEXTO FORNECIDO:**\n"
        f"- Segmento: {context.segmento}\n"
        f"- Contexto adicional: {context.contexto_adicional or 'Não fornecido'}\n"
        f"- Data da análise: {context.analysis_date.isoformat()}\n\n"
        "**PESQUISAS WEB REALIZADAS:**\n"
        f"{format_web_research(context.web_results)}\n\n"
        "**DADOS DE TENDÊNCIAS:**\n"
        f"{trend_section}\n\n"
    )
    return header + _REPORT_STRUCTURE


def build_single_prompt(context: ResearchContext) -> str:
    """System framing and report request in one string, for single-turn models."""
    return f"{SYSTEM_PROMPT}\n\n{build_analysis_prompt(context)}"


def build_chat_messages(context: ResearchContext) -> list[dict[str, str]]:
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": build_analysis_prompt(context)},
    ]


__all__ = [
    "SYSTEM_PROMPT",
    "build_analysis_prompt",
    "build_chat_messages",
    "build_single_prompt",
    "format_web_research",
]
