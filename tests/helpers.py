"""Test doubles and sample sources shared across test modules."""

import sys

from smart_validator.models import Finding

# Commands that always succeed, standing in for tsc / the build script.
PASSING_COMMAND = [sys.executable, "-c", "pass"]


class FakeAdapter:
    """Compiler adapter double that records calls."""

    def __init__(self, type_findings: list[Finding] | None = None, build_findings: list[Finding] | None = None):
        self.type_findings = type_findings or []
        self.build_findings = build_findings or []
        self.calls: list[str] = []

    async def invoke_type_check(self) -> list[Finding]:
        self.calls.append("type")
        return list(self.type_findings)

    async def invoke_build_check(self) -> list[Finding]:
        self.calls.append("build")
        return list(self.build_findings)


UNSAFE_HANDLER = """import { serve } from "https://deno.land/std@0.168.0/http/server.ts";

serve(async (req) => {
  const { url } = await req.json();
  const response = await fetch(url);
  return new Response(await response.text());
});
"""

SAFE_HANDLER = """import { serve } from "https://deno.land/std@0.168.0/http/server.ts";
import { createClient } from "https://esm.sh/@supabase/supabase-js@2";

const corsHeaders = {
  "Access-Control-Allow-Origin": "*",
  "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
};

const ALLOWED_DOMAINS = ["example.com"];

function isAllowedDomain(url: string): boolean {
  return ALLOWED_DOMAINS.some((domain) => new URL(url).hostname.endsWith(domain));
}

serve(async (req) => {
  const supabase = createClient(Deno.env.get("SUPABASE_URL")!, Deno.env.get("SUPABASE_ANON_KEY")!);
  const { data: { user } } = await supabase.auth.getUser();
  const { url } = await req.json();
  if (!url) {
    throw new Error("url is required");
  }
  if (!isAllowedDomain(url)) {
    return new Response("forbidden", { status: 403, headers: corsHeaders });
  }
  const response = await fetch(url);
  return new Response(await response.text(), { headers: corsHeaders });
});
"""
