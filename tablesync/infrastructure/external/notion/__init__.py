"""
Integracion con la API de Notion (lectura de paginas y relaciones).
"""
