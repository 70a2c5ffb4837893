# services/pdf_service.py

import io
import os
import logging
from typing import Dict

# Libs para geração de PDF
from reportlab.lib.pagesizes import A4
from reportlab.platypus import (
    SimpleDocTemplate, Table, TableStyle,
    Paragraph, Spacer
)
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib import colors
from reportlab.lib.units import cm

from services.relatorio_payload import ResultadoRelatorio
from utils.helpers import formatar_data, formatar_data_simples, formatar_moeda

logger = logging.getLogger(__name__)

ESTILO_TABELA = [
    ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor('#1D4ED8')),
    ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
    ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
    ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
    ('ALIGN', (-1, 0), (-1, -1), 'RIGHT'),
    ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
    ('BOTTOMPADDING', (0, 0), (-1, 0), 8),
    ('FONTNAME', (0, -1), (-1, -1), 'Helvetica-Bold'),
    ('BACKGROUND', (0, -1), (-1, -1), colors.HexColor('#EAEAEA'))
]


def _add_cabecalho(canvas, doc):
    """Desenha o logo no topo da página, se existir em assets/logo.png."""
    canvas.saveState()
    try:
        project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
        logo_path = os.path.join(project_root, "assets", "logo.png")
        if os.path.exists(logo_path):
            image_width = 4 * cm
            x_centered = (doc.pagesize[0] - image_width) / 2
            y_pos = doc.pagesize[1] - 0.8 * cm
            canvas.drawImage(
                logo_path, x_centered, y_pos,
                width=image_width, preserveAspectRatio=True, anchor='n',
                mask='auto'
            )
    except Exception as e:
        logger.error(f"Erro ao desenhar o logo: {e}", exc_info=True)
    canvas.restoreState()


def _add_rodape(canvas, doc):
    """Escreve o número da página no rodapé."""
    canvas.saveState()
    canvas.setFont('Helvetica', 8)
    canvas.drawCentredString(doc.pagesize[0] / 2, 1.5 * cm, f"Receita Municipal - página {canvas.getPageNumber()}")
    canvas.restoreState()


def gerar_pdf_relatorio(relatorio: Dict, resultado: ResultadoRelatorio) -> io.BytesIO:
    """
    Gera o PDF de um relatório salvo: cabeçalho com título e período,
    totais, resumo por órgão e a lista de receitas.
    """
    file_stream = io.BytesIO()

    doc = SimpleDocTemplate(
        file_stream, pagesize=A4,
        leftMargin=2*cm, rightMargin=2*cm,
        topMargin=3*cm, bottomMargin=2.5*cm,
        title=relatorio.get('titulo') or 'Relatório de Receitas'
    )

    styles = getSampleStyleSheet()
    styles.add(ParagraphStyle(name='CenterH2', alignment=1, parent=styles['h2'], fontName='Helvetica-Bold'))
    styles.add(ParagraphStyle(name='h3_custom', parent=styles['h3'], fontName='Helvetica-Bold', spaceAfter=6))
    styles.add(ParagraphStyle(name='CenterText', alignment=1, parent=styles['Normal']))

    elements = []

    # Título e período
    elements.append(Paragraph(relatorio.get('titulo') or 'Relatório de Receitas', styles['CenterH2']))
    if relatorio.get('descricao'):
        elements.append(Paragraph(relatorio['descricao'], styles['CenterText']))
    elements.append(Paragraph(
        f"Período: {formatar_data_simples(resultado.periodo.data_inicio)} "
        f"a {formatar_data_simples(resultado.periodo.data_fim)}",
        styles['CenterText']
    ))
    elements.append(Spacer(1, 0.6*cm))

    # Totais
    totais_data = [
        ['TOTAL ARRECADADO', 'QUANTIDADE DE RECEITAS'],
        [formatar_moeda(resultado.totais.valor_total), str(resultado.totais.quantidade)]
    ]
    totais_table = Table(totais_data, colWidths=[doc.width/2.0, doc.width/2.0])
    totais_table.setStyle(TableStyle([
        ('GRID', (0, 0), (-1, -1), 1, colors.black),
        ('ALIGN', (0, 0), (-1, -1), 'CENTER'),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 1), (-1, 1), 14),
        ('PADDING', (0, 0), (-1, -1), 6)
    ]))
    elements.append(totais_table)
    elements.append(Spacer(1, 0.6*cm))

    # Resumo por órgão
    elements.append(Paragraph("Receitas por Órgão", styles['h3_custom']))
    if not resultado.receitas_por_orgao:
        elements.append(Paragraph("Nenhuma receita encontrada no período.", styles['Normal']))
    else:
        orgaos_data = [['ÓRGÃO', 'TIPO', 'QTD.', 'VALOR TOTAL']]
        for grupo in resultado.receitas_por_orgao.values():
            orgaos_data.append([
                grupo.nome or 'N/A', grupo.tipo or '-', str(grupo.quantidade), formatar_moeda(grupo.valor_total)
            ])
        orgaos_data.append(['', 'TOTAL', str(resultado.totais.quantidade), formatar_moeda(resultado.totais.valor_total)])
        orgaos_table = Table(orgaos_data, colWidths=[doc.width*0.40, doc.width*0.20, doc.width*0.12, doc.width*0.28])
        orgaos_table.setStyle(TableStyle(ESTILO_TABELA))
        elements.append(orgaos_table)
    elements.append(Spacer(1, 0.6*cm))

    # Detalhamento
    elements.append(Paragraph("Detalhamento das Receitas", styles['h3_custom']))
    receitas_data = [['DATA', 'ÓRGÃO', 'SERVIÇO', 'QTD.', 'VALOR']]
    for receita in resultado.receitas:
        orgao = receita.get('orgao') or {}
        tipo_servico = receita.get('tipo_servico') or {}
        receitas_data.append([
            formatar_data(receita.get('data_recebimento')),
            Paragraph(orgao.get('nome') or 'N/A', styles['Normal']),
            Paragraph(tipo_servico.get('nome') or 'N/A', styles['Normal']),
            str(receita.get('quantidade', '')),
            formatar_moeda(receita.get('valor_total'))
        ])
    receitas_data.append(['', '', '', 'TOTAL', formatar_moeda(
        sum(float(receita.get('valor_total') or 0) for receita in resultado.receitas)
    )])
    col_widths = [doc.width*0.20, doc.width*0.27, doc.width*0.25, doc.width*0.10, doc.width*0.18]
    receitas_table = Table(receitas_data, colWidths=col_widths, repeatRows=1)
    receitas_table.setStyle(TableStyle(ESTILO_TABELA))
    elements.append(receitas_table)

    # Monta PDF
    doc.build(elements,
              onFirstPage=lambda c, d: (_add_cabecalho(c, d), _add_rodape(c, d)),
              onLaterPages=lambda c, d: (_add_cabecalho(c, d), _add_rodape(c, d)))

    file_stream.seek(0)
    return file_stream
