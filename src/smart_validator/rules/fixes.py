"""Static fix snippets attached to findings.

Each generator returns literal text; nothing here looks at the offending file.
"""


def self_closing_fix() -> str:
    return "Use self-closing syntax for void elements: <br />, <hr />, <img ... />, <input ... />"


def key_prop_fix() -> str:
    return """// Give every mapped element a stable key
{items.map((item) => (
  <li key={item.id}>{item.name}</li>
))}"""


def class_binding_fix() -> str:
    return """// Never let undefined reach className
className={cn('base-class', isActive ? 'active' : '')}"""


def auth_fix() -> str:
    return """// Add authentication check
const authHeader = req.headers.get('Authorization');
if (!authHeader) {
  return new Response(JSON.stringify({ error: 'Unauthorized' }), {
    status: 401,
    headers: { ...corsHeaders, 'Content-Type': 'application/json' }
  });
}

const supabase = createClient(
  Deno.env.get('SUPABASE_URL')!,
  Deno.env.get('SUPABASE_ANON_KEY')!,
  { global: { headers: { Authorization: authHeader } } }
);

const { data: { user }, error } = await supabase.auth.getUser();
if (error || !user) {
  return new Response(JSON.stringify({ error: 'Invalid token' }), {
    status: 401,
    headers: { ...corsHeaders, 'Content-Type': 'application/json' }
  });
}"""


def cors_fix() -> str:
    return """// Add CORS headers
const corsHeaders = {
  'Access-Control-Allow-Origin': '*',
  'Access-Control-Allow-Headers': 'authorization, x-client-info, apikey, content-type',
};"""


def input_validation_fix() -> str:
    return """// Add input validation
const { param } = await req.json();

if (!param || typeof param !== 'string') {
  return new Response(JSON.stringify({ error: 'Invalid parameter' }), {
    status: 400,
    headers: { ...corsHeaders, 'Content-Type': 'application/json' }
  });
}"""


def sensitive_logging_fix() -> str:
    return "Remove or sanitize logging of request body"


def ssrf_fix() -> str:
    return """// Add SSRF protection
const ALLOWED_DOMAINS = ['example.com'];

function isAllowedDomain(url: string): boolean {
  try {
    const parsedUrl = new URL(url);
    return ALLOWED_DOMAINS.some(domain =>
      parsedUrl.hostname === domain ||
      parsedUrl.hostname.endsWith('.' + domain)
    );
  } catch {
    return false;
  }
}

if (!isAllowedDomain(url)) {
  return new Response(JSON.stringify({ error: 'Domain not allowed' }), {
    status: 403,
    headers: { ...corsHeaders, 'Content-Type': 'application/json' }
  });
}"""


def image_size_fix() -> str:
    return """// Add size validation
const MAX_IMAGE_SIZE = 10 * 1024 * 1024; // 10 MB

if (imageData.length > MAX_IMAGE_SIZE) {
  return new Response(
    JSON.stringify({ error: 'Image too large. Maximum 10 MB allowed.' }),
    { status: 413, headers: { ...corsHeaders, 'Content-Type': 'application/json' } }
  );
}"""


def row_level_security_fix() -> str:
    return """-- Enable row level security and add a policy
ALTER TABLE <table_name> ENABLE ROW LEVEL SECURITY;
CREATE POLICY "Users can read own rows" ON <table_name>
  FOR SELECT USING (auth.uid() = user_id);"""


def identity_table_fix() -> str:
    return "Use user_roles table instead of direct auth.users access"


def role_table_fix() -> str:
    return """-- Create a dedicated role table with a SECURITY DEFINER lookup
CREATE TYPE app_role AS ENUM ('admin', 'user');

CREATE TABLE user_roles (
  id uuid PRIMARY KEY DEFAULT gen_random_uuid(),
  user_id uuid REFERENCES auth.users ON DELETE CASCADE NOT NULL,
  role app_role NOT NULL,
  UNIQUE (user_id, role)
);
ALTER TABLE user_roles ENABLE ROW LEVEL SECURITY;

CREATE FUNCTION has_role(_user_id uuid, _role app_role) RETURNS boolean
LANGUAGE sql STABLE SECURITY DEFINER SET search_path = public AS $$
  SELECT EXISTS (SELECT 1 FROM user_roles WHERE user_id = _user_id AND role = _role)
$$;"""


def sanitize_html_fix() -> str:
    return """// Sanitize HTML before rendering
import DOMPurify from 'dompurify';
<div dangerouslySetInnerHTML={{ __html: DOMPurify.sanitize(content) }} />"""


def secret_fix() -> str:
    return """// Move secrets to environment variables
const apiKey = import.meta.env.VITE_PUBLIC_API_KEY;"""


def server_role_fix() -> str:
    return "Use server-side role validation via RLS policies"


def fetch_timeout_fix() -> str:
    return """// Add a timeout to fetch calls
const controller = new AbortController();
const timeout = setTimeout(() => controller.abort(), 10000);
try {
  const response = await fetch(url, { signal: controller.signal });
} finally {
  clearTimeout(timeout);
}"""


def jwt_fix() -> str:
    return "Remove verify_jwt = false or set to true"


def zod_fix() -> str:
    return "Add zod for runtime validation: npm install zod"
