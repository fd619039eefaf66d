"""access_scout.enrichment: пояснения и глубокий анализ страниц с помощью ИИ."""
