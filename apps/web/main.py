"""FastAPI web application for DepBump."""

from fastapi import FastAPI, File, Form, HTTPException, UploadFile
from fastapi.responses import HTMLResponse
from pydantic import BaseModel

from core.config import DEFAULT_CONCURRENCY, CheckOptions
from core.errors import ConfigError, DepBumpError, MalformedManifest
from core.fetch import check_manifest
from core.manifest import apply_changes, dump_manifest, parse_manifest
from core.models import ChangeSet
from core.report import render

app = FastAPI(
    title="DepBump",
    description="Check package.json dependencies against the npm registry",
    version="0.1.0",
)


class CheckRequest(BaseModel):
    """Request model for checking a package.json."""
    content: str
    concurrency: int = DEFAULT_CONCURRENCY
    skip_failures: bool = False


class CheckResponse(BaseModel):
    """Response model for a dependency check."""
    original_content: str
    updated_content: str
    changes: dict[str, list[dict]]
    report: dict[str, str]
    failures: dict[str, dict[str, str]]
    errors: dict[str, str]
    has_changes: bool


@app.get("/", response_class=HTMLResponse)
async def home():
    """Serve the main application page."""
    return get_index_html()


@app.post("/api/check", response_model=CheckResponse)
async def check_dependencies(request: CheckRequest):
    """Check dependencies from package.json content."""
    try:
        content = request.content.strip()
        if not content:
            raise HTTPException(status_code=400, detail="No content provided")

        manifest = parse_manifest(request.content)
        options = CheckOptions(
            concurrency=request.concurrency,
            fail_fast=not request.skip_failures,
        )

        result = await check_manifest(manifest.dependencies, manifest.dev_dependencies, options)

        # Only sections that were fetched completely are applied
        if result.has_changes:
            document = apply_changes(
                manifest.document, result.change_sets.values(), skip_sections=result.errors.keys()
            )
            updated_content = dump_manifest(manifest, document)
        else:
            updated_content = request.content

        return CheckResponse(
            original_content=request.content,
            updated_content=updated_content,
            changes={section: _changes_json(cs) for section, cs in result.change_sets.items()},
            report={section: render(cs) for section, cs in result.change_sets.items()},
            failures={section: cs.failures for section, cs in result.change_sets.items() if cs.failures},
            errors={section: str(error) for section, error in result.errors.items()},
            has_changes=result.has_changes,
        )

    except HTTPException:
        # Re-raise HTTP exceptions (don't convert to 500)
        raise
    except MalformedManifest as e:
        raise HTTPException(status_code=400, detail=f"Invalid package.json: {e}")
    except ConfigError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except DepBumpError as e:
        raise HTTPException(status_code=500, detail=f"Error checking dependencies: {e}")


@app.post("/api/upload", response_model=CheckResponse)
async def upload_file(
    file: UploadFile = File(...),
    concurrency: int = Form(DEFAULT_CONCURRENCY),
    skip_failures: bool = Form(False),
):
    """Upload and check a package.json file."""
    if not file.filename:
        raise HTTPException(status_code=400, detail="No file uploaded")

    content = await file.read()
    try:
        text_content = content.decode("utf-8")
    except UnicodeDecodeError:
        raise HTTPException(status_code=400, detail="File must be valid UTF-8 text")

    request = CheckRequest(
        content=text_content,
        concurrency=concurrency,
        skip_failures=skip_failures,
    )
    return await check_dependencies(request)


def _changes_json(change_set: ChangeSet) -> list[dict]:
    return [
        {
            "name": change.package_name,
            "current_version": change.declared,
            "new_version": change.updated,
            "semver_delta": change.semver_delta,
        }
        for change in change_set
    ]


def get_index_html() -> str:
    """Return the main HTML page."""
    return """
    <!DOCTYPE html>
    <html lang="en">
    <head>
        <meta charset="UTF-8">
        <meta name="viewport" content="width=device-width, initial-scale=1.0">
        <title>DepBump - npm Dependency Checker</title>
        <link href="https://cdn.jsdelivr.net/npm/bootstrap@5.3.0/dist/css/bootstrap.min.css" rel="stylesheet">
        <style>
            .report { font-family: 'Courier New', monospace; white-space: pre; }
        </style>
    </head>
    <body>
        <div class="container py-4">
            <div class="text-center mb-4">
                <h1 class="display-5 fw-bold text-primary">DepBump</h1>
                <p class="lead text-muted">Find outdated npm dependencies in your package.json</p>
            </div>
            <div class="mb-3">
                <textarea id="content" class="form-control font-monospace" rows="14"
                          placeholder='{"dependencies": {"left-pad": "^1.0.0"}}'></textarea>
            </div>
            <button id="checkBtn" class="btn btn-primary mb-4">Check</button>
            <div id="error" class="alert alert-danger d-none"></div>
            <h4>Dependencies</h4>
            <div id="dependencies" class="report mb-4"></div>
            <h4>DevDependencies</h4>
            <div id="devDependencies" class="report mb-4"></div>
            <h4>Updated package.json</h4>
            <textarea id="updated" class="form-control font-monospace" rows="14" readonly></textarea>
        </div>
        <script>
            const errorBox = document.getElementById('error');

            document.getElementById('checkBtn').addEventListener('click', async () => {
                errorBox.classList.add('d-none');
                const response = await fetch('/api/check', {
                    method: 'POST',
                    headers: {'Content-Type': 'application/json'},
                    body: JSON.stringify({content: document.getElementById('content').value}),
                });
                const data = await response.json();
                if (!response.ok) {
                    errorBox.textContent = data.detail;
                    errorBox.classList.remove('d-none');
                    return;
                }
                for (const section of ['dependencies', 'devDependencies']) {
                    const box = document.getElementById(section);
                    box.textContent = data.errors[section] || data.report[section] || 'Up to date';
                }
                document.getElementById('updated').value = data.updated_content;
            });
        </script>
    </body>
    </html>
    """


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
