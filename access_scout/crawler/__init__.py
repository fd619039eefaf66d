"""access_scout.crawler: обход сайта и аудит страниц."""
