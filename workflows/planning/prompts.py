"""Prompts for the automation planning workflow."""

SYSTEM_PROMPT = """Eres un experto consultor en automatización de clase mundial. Ayudas a pequeñas y medianas empresas a identificar procesos manuales y a sustituirlos por flujos de agentes autónomos.

Tus responsabilidades:
- Entender el modelo operativo del negocio descrito
- Investigar herramientas y plataformas actuales con la búsqueda web
- Recomendar soluciones concretas, con nombres de productos reales
- Estimar costes, plazos y retorno de la inversión

Tienes acceso a esta herramienta:
- web_search: busca información actual en internet"""


INITIAL_ANALYSIS_PROMPT = """Analiza esta descripción de negocio: "{description}"

Antes de escribir el plan, usa web_search para comprobar qué herramientas de automatización, integraciones y precios actuales encajan con este negocio.
Haz como máximo {max_searches} búsquedas. Cuando tengas suficiente información, responde con un breve resumen de tus hallazgos."""


PLAN_JSON_PROMPT = """Basándote en la descripción del negocio y en la investigación realizada, genera un plan de automatización detallado.

Descripción: "{description}"

Investigación:
{research}

Responde ÚNICAMENTE con un objeto JSON con exactamente estas claves, cada una con texto en markdown (listas con "- " o "1."):
{{
    "analysis": "Análisis de procesos manuales...",
    "flows": "Diseño de flujos de agentes...",
    "stack": "Stack tecnológico recomendado...",
    "implementation": "Implementación paso a paso...",
    "roi": "ROI estimado..."
}}

Sé extremadamente profesional y recomienda herramientas actuales."""


PLAN_MARKDOWN_PROMPT = """Basándote en la descripción del negocio y en la investigación realizada, genera un plan detallado siguiendo estrictamente esta estructura de encabezados markdown:

Descripción: "{description}"

Investigación:
{research}

### 1. Análisis de Procesos Manuales
[Contenido]

### 2. Diseño de Flujos de Agentes
[Contenido]

### 3. Stack Tecnológico Recomendado
[Contenido]

### 4. Implementación Paso a Paso
[Contenido]

### 5. ROI Estimado
[Contenido]

Sé extremadamente profesional y recomienda herramientas actuales."""
