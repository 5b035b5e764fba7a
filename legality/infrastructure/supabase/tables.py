"""Remote table names and projections (schema-in-code).

The relational schema lives in the Supabase project; these constants keep
table names and the embedded-resource selects consistent across the
repositories.
"""

TABLE_PROFILES = "profiles"
TABLE_EMPRESAS = "empresas"
TABLE_CASOS = "casos"
TABLE_ASIGNACIONES = "asignaciones"
TABLE_TAREAS = "tareas"
TABLE_SOLICITUDES_HORAS = "solicitudes_horas"

PROFILE_COLUMNS = "id, email, full_name, role, created_at, updated_at"

# casos.cliente_id and asignaciones.usuario_id both reference profiles, so the
# cliente embed names its foreign key explicitly.
CASO_DETAIL_SELECT = f"""
    *,
    empresa:empresas(id, nombre, created_at),
    cliente:profiles!casos_cliente_id_fkey({PROFILE_COLUMNS}),
    asignaciones(*, usuario:profiles({PROFILE_COLUMNS})),
    tareas(id, estado)
"""

TAREA_WITH_CASO_SELECT = "*, caso:casos(titulo)"
