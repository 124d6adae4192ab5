"""
Remote-method generator — the JavaScript script of a SOAP container model.

The script attaches to the SOAP datasource, creates the connector's
model for the binding once connected, and exposes one remote method per
selected operation:

    POST /<model http path>/<Operation>   body → request model
                                          root result → response model
"""

from __future__ import annotations

import re
from dataclasses import dataclass


@dataclass
class OperationSignature:
    """An operation and the model names of its request and response."""

    name: str
    input_type: str = "object"
    output_type: str = "object"

    @property
    def method_name(self) -> str:
        return method_name(self.name)


# ── Templates ───────────────────────────────────────────────────


_HEADER = """\
// Generated from {wsdl}
// Remote methods for SOAP binding '{binding}' (datasource '{datasource}').
'use strict';

module.exports = function({model}) {{
  var soapDataSource = {model}.app.dataSources['{datasource}'];
  var {service};

  soapDataSource.once('connected', function() {{
    // Create the connector model for the binding
    {service} = soapDataSource.createModel('{binding}', {{}});
  }});
"""

_METHOD = """
  /**
   * {operation}
   * @param {{{input_type}}} {argument} {input_type}
   * @callback {{Function}} callback Callback function
   * @param {{Error|string}} err Error object
   * @param {{{output_type}}} result Result object
   */
  {model}.{method} = function({argument}, callback) {{
    {service}.{operation}({argument}, function(err, response) {{
      var result = response;
      callback(err, result);
    }});
  }};
"""

_REMOTE_METHOD = """
  // Map to REST/HTTP
  {model}.remoteMethod('{method}', {{
    isStatic: true,
    produces: [
      {{produces: 'application/json'}},
      {{produces: 'application/xml'}},
    ],
    accepts: [
      {{
        arg: '{argument}',
        type: '{input_type}',
        description: '{input_type}',
        required: true,
        http: {{source: 'body'}},
      }},
    ],
    returns: [
      {{
        arg: 'result',
        type: '{output_type}',
        description: '{output_type}',
        root: true,
      }},
    ],
    http: {{verb: 'post', path: '/{operation}'}},
    description: '{operation}',
  }});
"""

_FOOTER = """\
};
"""

_NON_IDENTIFIER = re.compile(r"[^A-Za-z0-9_$]")


def js_identifier(name: str) -> str:
    """Make a string usable as a JavaScript variable name."""
    ident = _NON_IDENTIFIER.sub("_", name)
    if not ident or ident[0].isdigit():
        ident = f"_{ident}"
    return ident


def method_name(operation: str) -> str:
    """Remote method name for an operation (``GetWeather`` → ``getWeather``)."""
    ident = js_identifier(operation)
    return ident[0].lower() + ident[1:]


def render_remote_methods(
    model_name: str,
    binding_name: str,
    datasource_name: str,
    operations: list[OperationSignature],
    wsdl: str = "",
) -> str:
    """Render the script for a container model.

    Args:
        model_name: Container model (``soap_<binding>``).
        binding_name: WSDL binding the connector model is created for.
        datasource_name: SOAP datasource name.
        operations: Selected operations, in output order.
        wsdl: WSDL location, recorded in the header comment.
    """
    model = js_identifier(model_name)
    service = js_identifier(binding_name)
    if service == model:
        service = f"{service}Client"

    parts = [
        _HEADER.format(
            wsdl=wsdl or "WSDL",
            binding=binding_name,
            datasource=datasource_name,
            model=model,
            service=service,
        )
    ]
    for op in operations:
        fields = {
            "model": model,
            "service": service,
            "operation": op.name,
            "method": op.method_name,
            "argument": js_identifier(op.name),
            "input_type": op.input_type,
            "output_type": op.output_type,
        }
        parts.append(_METHOD.format(**fields))
        parts.append(_REMOTE_METHOD.format(**fields))
    parts.append(_FOOTER)
    return "".join(parts)
